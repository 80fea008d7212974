"""
Basic test to verify package setup is correct.
"""

def test_package_imports():
    """Test that the package can be imported."""
    import zuspec.be.smt
    assert zuspec.be.smt.__version__ == "0.1.0"
    assert hasattr(zuspec.be.smt, '__version__')


def test_package_structure():
    """Test that package structure is accessible."""
    from zuspec.be import smt
    assert smt.__version__ == "0.1.0"
    assert smt.Context is not None
    assert smt.DatatypeBuilder is not None
