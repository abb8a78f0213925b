"""
Applicability metadata for a content-fulfillment file.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from .result import Result, ResultCode


class Architecture(Enum):
    """CPU architectures a file can apply to."""
    NONE = "None"
    X86 = "x86"
    AMD64 = "amd64"
    ARM = "arm"
    ARM64 = "arm64"


@dataclass(frozen=True)
class ApplicabilityDetails:
    """
    Immutable description of where a file applies.
    
    Use ApplicabilityDetails.make to build one; it validates its inputs
    and reports problems as a Result instead of raising.
    """
    
    architectures: Tuple[Architecture, ...]
    platform_applicability_for_package: Tuple[str, ...]
    file_moniker: str
    
    @classmethod
    def make(
        cls,
        architectures: Iterable[Architecture],
        platform_applicability_for_package: Iterable[str],
        file_moniker: str,
    ) -> Tuple[Result, Optional["ApplicabilityDetails"]]:
        """
        Create ApplicabilityDetails from caller supplied values.
        
        Args:
            architectures: Architectures the file applies to
            platform_applicability_for_package: Platform applicability strings
            file_moniker: Moniker of the file
            
        Returns:
            (Result, details). details is None unless the Result is Ok.
        """
        try:
            archs = tuple(architectures)
            platforms = tuple(platform_applicability_for_package)
        except TypeError as e:
            return Result(ResultCode.INVALID_ARG, f"Arguments must be iterable: {e}"), None
        
        for arch in archs:
            if not isinstance(arch, Architecture):
                return Result(ResultCode.INVALID_ARG, f"Invalid architecture: {arch!r}"), None
        
        for platform in platforms:
            if not isinstance(platform, str):
                return Result(ResultCode.INVALID_ARG, "Platform applicability entries must be strings"), None
        
        if not isinstance(file_moniker, str):
            return Result(ResultCode.INVALID_ARG, "file_moniker must be a string"), None
        
        return Result.ok(), cls(
            architectures=archs,
            platform_applicability_for_package=platforms,
            file_moniker=file_moniker,
        )
