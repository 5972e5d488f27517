"""Blockchain access: RPC connection, deployments, transactions and events."""

from ip_registry_tools.chain.client import ProtocolClient
from ip_registry_tools.chain.connection import check_connection, get_account, get_web3
from ip_registry_tools.chain.deployment import Deployment, load_deployment
from ip_registry_tools.chain.events import EventDecoder, first_event
from ip_registry_tools.chain.transactions import TransactionSender

__all__ = [
    "ProtocolClient",
    "check_connection",
    "get_account",
    "get_web3",
    "Deployment",
    "load_deployment",
    "EventDecoder",
    "first_event",
    "TransactionSender",
]
