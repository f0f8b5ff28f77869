"""Minimal ABIs for the Hyper Engine and AI Optimizer contracts."""


def _uint(name: str) -> dict:
    return {"name": name, "type": "uint256", "internalType": "uint256"}


def _address(name: str) -> dict:
    return {"name": name, "type": "address", "internalType": "address"}


HYPER_ENGINE_ABI: list[dict] = [
    {
        "type": "function",
        "name": "deposit",
        "stateMutability": "nonpayable",
        "inputs": [_uint("amount")],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "withdraw",
        "stateMutability": "nonpayable",
        "inputs": [_uint("amount")],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "autoRebalance",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "getUserStats",
        "stateMutability": "view",
        "inputs": [_address("user")],
        "outputs": [
            _uint("principal"),
            _uint("currentRewards"),
            _uint("totalEarned"),
            _uint("averageAPY"),
            _uint("hourlyRate"),
            _uint("dailyRate"),
        ],
    },
    {
        "type": "function",
        "name": "getAverageAPY",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [_uint("")],
    },
    {
        "type": "function",
        "name": "positions",
        "stateMutability": "view",
        "inputs": [_address("")],
        "outputs": [
            _uint("principal"),
            _uint("aaveAmount"),
            _uint("uniswapLP"),
            _uint("compoundAmount"),
            _uint("curveAmount"),
            _uint("yearnAmount"),
            _uint("stakingAmount"),
            _uint("lastUpdate"),
            _uint("totalRewards"),
            {"name": "aiOptLevel", "type": "uint8", "internalType": "uint8"},
        ],
    },
    {
        "type": "function",
        "name": "strategies",
        "stateMutability": "view",
        "inputs": [_uint("")],
        "outputs": [
            {"name": "name", "type": "string", "internalType": "string"},
            _address("protocol"),
            _uint("baseAPY"),
            _uint("boostedAPY"),
            {"name": "active", "type": "bool", "internalType": "bool"},
            _uint("tvl"),
        ],
    },
]

AI_OPTIMIZER_ABI: list[dict] = [
    {
        "type": "function",
        "name": "optimizeYield",
        "stateMutability": "nonpayable",
        "inputs": [_address("user")],
        "outputs": [_uint("")],
    },
    {
        "type": "function",
        "name": "predictReturns",
        "stateMutability": "view",
        "inputs": [_address("user"), _uint("timeHorizon")],
        "outputs": [_uint("")],
    },
    {
        "type": "function",
        "name": "userModels",
        "stateMutability": "view",
        "inputs": [_address("")],
        "outputs": [
            _uint("predictionAccuracy"),
            _uint("lastUpdate"),
            {"name": "active", "type": "bool", "internalType": "bool"},
        ],
    },
]
