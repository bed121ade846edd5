from .trace_store import TraceSearchPage, TraceStoreClient, TraceStoreConfig

__all__ = ['TraceSearchPage', 'TraceStoreClient', 'TraceStoreConfig']
