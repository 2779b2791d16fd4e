import logging
import os
import sys
import unittest

from utils.logger_service import configure_logging

TESTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "tests")


def main():
    configure_logging(logging.WARNING)
    suite = unittest.defaultTestLoader.discover(TESTS_DIR, top_level_dir=TESTS_DIR)
    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(main())
