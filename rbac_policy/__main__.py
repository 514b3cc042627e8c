#!/usr/bin/env python3
"""
RBAC Policy entry point.

Grants and revokes roles through Kubernetes role bindings.
"""

import sys

from .libs.main_app import main

if __name__ == "__main__":
    sys.exit(main())
