"""
Configuration for sfs_client connections.
"""

from dataclasses import dataclass

from typing_extensions import Final

# Hard limit on response size, so a rogue server cannot make us buffer
# an unbounded amount of data.
MAX_RESPONSE_CHARACTERS: Final = 100_000

DEFAULT_TIMEOUT: Final = 30.0
DEFAULT_READ_CHUNK_SIZE: Final = 65536


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Settings applied to every transport session a connection owns.
    
    Attributes:
        timeout: Timeout in seconds for connecting and for each read
        max_response_chars: Maximum accepted response body size
        verify_tls: Whether to verify server certificates
        read_chunk_size: Maximum bytes read from the network at once
    """
    
    timeout: float = DEFAULT_TIMEOUT
    max_response_chars: int = MAX_RESPONSE_CHARACTERS
    verify_tls: bool = True
    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE
    
    def __post_init__(self) -> None:
        if not isinstance(self.timeout, (int, float)) or isinstance(self.timeout, bool):
            raise ValueError("timeout must be a number")
        
        if not isinstance(self.max_response_chars, int) or self.max_response_chars < 0:
            raise ValueError("max_response_chars must be a non-negative int")
        
        if not isinstance(self.verify_tls, bool):
            raise ValueError("verify_tls must be bool")
        
        if not isinstance(self.read_chunk_size, int) or self.read_chunk_size <= 0:
            raise ValueError("read_chunk_size must be a positive int")
