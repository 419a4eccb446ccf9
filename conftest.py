import os
import signal
import logging
import pytest

# Reduce noisy DEBUG logs emitted under the 'conftest' logger during pytest runs.
logging.getLogger('conftest').setLevel(logging.INFO)

# Keep numpy's BLAS backend single-threaded during tests
os.environ.setdefault('OMP_NUM_THREADS', '1')
os.environ.setdefault('OPENBLAS_NUM_THREADS', '1')

# Summary caching is exercised explicitly by test_cache.py
os.environ.pop('PESTSCAN_DISABLE_CACHE', None)

# Default per-test timeout in seconds. Can be overridden with TEST_TIMEOUT env var.
DEFAULT_TIMEOUT = int(os.environ.get('TEST_TIMEOUT', '15'))


def _raise_timeout(signum, frame):
    raise TimeoutError(f"Test exceeded timeout of {DEFAULT_TIMEOUT}s")


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_setup(item):
    # Only set alarm on POSIX-like systems where signal.alarm exists
    if hasattr(signal, 'alarm'):
        timeout = int(os.environ.get('TEST_TIMEOUT', str(DEFAULT_TIMEOUT)))
        signal.signal(signal.SIGALRM, _raise_timeout)
        signal.alarm(timeout)


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_teardown(item, nextitem):
    # Cancel alarm after test finishes
    if hasattr(signal, 'alarm'):
        signal.alarm(0)
