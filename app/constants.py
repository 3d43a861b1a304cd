from web3 import Web3

MAX_UINT64 = 2**64 - 1
MAX_UINT128 = 2**128 - 1
MAX_UINT256 = 2**256 - 1

# Linea
DOUBLE_COST_CHAIN_IDS = frozenset((59140, 59142))

OPTIMISM_CHAIN_IDS = frozenset(
    (
        10,  # optimism
        420,  # optimism goerli
        11155420,  # optimism sepolia
        8453,  # base
        84531,  # base goerli
        84532,  # base sepolia
        204,  # opBNB
        5611,  # opBNB testnet
        957,  # lyra
    )
)

ARBITRUM_CHAIN_ID = 42161
ARBITRUM_FALLBACK_CHAIN_ID = 10

BASE_CHAIN_IDS = frozenset((8453, 84531, 84532))

OPTIMISM_GAS_PRICE_ORACLE = Web3.to_checksum_address(
    "0x420000000000000000000000000000000000000F"
)
ARBITRUM_NODE_INTERFACE = Web3.to_checksum_address(
    "0x00000000000000000000000000000000000000C8"
)

PACKED_USER_OP_TYPES = (
    "address",  # sender
    "uint256",  # nonce
    "bytes",  # init_code
    "bytes",  # call_data
    "bytes32",  # account_gas_limits
    "uint256",  # pre_verification_gas
    "bytes32",  # gas_fees
    "bytes",  # paymaster_and_data
    "bytes",  # signature
)
HANDLE_OPS_SIGNATURE = (
    f"handleOps(({','.join(PACKED_USER_OP_TYPES)})[],address)"
)

# Sizing-only transaction fields, never sent to a node.
WORST_CASE_TX_NONCE = 999999
WORST_CASE_TX_SIGNATURE = {
    "v": 28,
    "r": 0x123451234512345123451234512345123451234512345123451234512345,
    "s": 0x123451234512345123451234512345123451234512345123451234512345,
}

INTRINSIC_GAS = 21000
CALL_GAS_LIMIT_BUFFER = 50000
MIN_CALL_GAS_LIMIT = 9000

GET_L1_FEE_ABI = [
    {
        "inputs": [
            {"internalType": "bytes", "name": "data", "type": "bytes"}
        ],
        "name": "getL1Fee",
        "outputs": [
            {"internalType": "uint256", "name": "fee", "type": "uint256"}
        ],
        "stateMutability": "view",
        "type": "function",
    }
]

GAS_ESTIMATE_L1_COMPONENT_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {
                "internalType": "bool",
                "name": "contractCreation",
                "type": "bool",
            },
            {"internalType": "bytes", "name": "data", "type": "bytes"},
        ],
        "name": "gasEstimateL1Component",
        "outputs": [
            {
                "internalType": "uint64",
                "name": "gasEstimateForL1",
                "type": "uint64",
            },
            {"internalType": "uint256", "name": "baseFee", "type": "uint256"},
            {
                "internalType": "uint256",
                "name": "l1BaseFeeEstimate",
                "type": "uint256",
            },
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    }
]
