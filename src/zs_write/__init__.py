"""ZS Write - container writer and command line."""
from .writer import ContainerWriter, WriteResult, write_container

__all__ = ["ContainerWriter", "WriteResult", "write_container"]
