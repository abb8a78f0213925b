"""
Tests for ApplicabilityDetails.
"""

import pytest

from sfs_client.applicability import ApplicabilityDetails, Architecture
from sfs_client.result import ResultCode


class TestApplicabilityDetails:
    """Test the validating factory."""

    def test_make(self):
        result, details = ApplicabilityDetails.make(
            [Architecture.AMD64, Architecture.ARM64], ["Windows.Desktop"], "app.msix"
        )

        assert result.is_success
        assert details.architectures == (Architecture.AMD64, Architecture.ARM64)
        assert details.platform_applicability_for_package == ("Windows.Desktop",)
        assert details.file_moniker == "app.msix"

    def test_inputs_are_copied(self):
        architectures = [Architecture.X86]
        _, details = ApplicabilityDetails.make(architectures, [], "")

        architectures.append(Architecture.ARM)

        assert details.architectures == (Architecture.X86,)

    def test_immutable(self):
        _, details = ApplicabilityDetails.make([], [], "moniker")

        with pytest.raises(AttributeError):
            details.file_moniker = "other"

    @pytest.mark.parametrize(
        "architectures, platforms, moniker",
        [
            (["amd64"], [], "m"),
            ([Architecture.ARM], [1], "m"),
            ([], [], None),
            (None, [], "m"),
        ],
    )
    def test_invalid_arguments(self, architectures, platforms, moniker):
        result, details = ApplicabilityDetails.make(architectures, platforms, moniker)

        assert result.code == ResultCode.INVALID_ARG
        assert result.message
        assert details is None
