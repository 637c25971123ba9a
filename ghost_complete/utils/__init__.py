# ghost_complete/utils/__init__.py
# logging, configuration and blob store backends
