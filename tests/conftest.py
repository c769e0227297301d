def pytest_addoption(parser):
    """Add command-line options for tests"""
    parser.addoption(
        "--remote",
        action="store_true",
        help="Run live tests against a running HTTP server instead of stdio",
    )
    parser.addoption(
        "--endpoint",
        action="store",
        default=None,
        help="URL for the remote server endpoint (for remote tests)",
    )
