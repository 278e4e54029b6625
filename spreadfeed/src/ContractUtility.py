"""ContractUtility: Web3 initialization and price aggregator contract access."""

import os

from web3 import Web3
from web3.contract import Contract

# Read-only subset of the Chainlink AggregatorV3Interface.
AGGREGATOR_V3_ABI: list[dict] = [
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"internalType": "uint8", "name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "description",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "latestRoundData",
        "outputs": [
            {"internalType": "uint80", "name": "roundId", "type": "uint80"},
            {"internalType": "int256", "name": "answer", "type": "int256"},
            {"internalType": "uint256", "name": "startedAt", "type": "uint256"},
            {"internalType": "uint256", "name": "updatedAt", "type": "uint256"},
            {"internalType": "uint80", "name": "answeredInRound", "type": "uint80"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


class ContractUtility:
    """Utility for Web3 connection and aggregator contract lookup.

    :ivar network: Network RPC URL.
    :ivar w3: Configured Web3 instance.
    """

    NETWORKS = {
        "localnet": "http://localhost:8545",
    }

    def __init__(self, network_name: str, w3: Web3 | None = None) -> None:
        """Initialize the contract utility.

        :param network_name: Known network name, or an RPC URL.
        :param w3: Optional pre-built Web3 instance (skips provider setup).
        """
        # RPC_URL env var overrides the default for the network
        self.network = os.environ.get("RPC_URL") or self.NETWORKS.get(
            network_name, network_name
        )
        self.w3 = w3 if w3 is not None else Web3(Web3.HTTPProvider(self.network))

    def get_aggregator(self, address: str) -> Contract:
        """Return a read-only aggregator contract at ``address``.

        :param address: Contract address (any checksum casing).
        :returns: web3 Contract bound to the AggregatorV3 ABI.
        :raises ValueError: If ``address`` is not a valid address.
        """
        if not Web3.is_address(address):
            raise ValueError(f"Invalid contract address '{address}'")
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address), abi=AGGREGATOR_V3_ABI
        )
