#!/usr/bin/env python
"""
Run the EvoTech backend test suite, app by app.
Usage: python Doc/run_tests.py [app ...]
"""
import os
import sys
import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'backend.core',
    'backend.locations',
    'backend.parties',
    'backend.catalog',
    'backend.inventory',
    'backend.treasury',
    'backend.sales',
    'backend.purchasing',
    'backend.reports',
]

if __name__ == "__main__":
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    labels = [f'backend.{name}' for name in sys.argv[1:]] or APPS
    failures = test_runner.run_tests(labels)
    sys.exit(bool(failures))
