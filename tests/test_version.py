"""Tests for version information."""


def test_version_module():
    """Test that version is accessible from module."""
    from proofline import __version__

    assert __version__
    assert isinstance(__version__, str)
    # Should be in SemVer format
    parts = __version__.split('.')
    assert len(parts) >= 2  # At least MAJOR.MINOR
