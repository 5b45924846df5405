"""OSV vulnerability records and reachability analysis over import, module and call graphs."""

__version__ = "0.1.0"