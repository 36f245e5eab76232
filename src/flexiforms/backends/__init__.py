"""Form definition store backends."""

from flexiforms.backends.rpc_store import RpcFormDefinitionStore

__all__ = ["RpcFormDefinitionStore"]
