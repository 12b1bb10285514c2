# coding: utf-8

"""
Tests Package

Test suite for the face quickstart.

Test Structure:
- conftest.py: In-memory Face service fake and fake clock
- test_face_detector.py, test_person_group.py, test_training_monitor.py: Unit tests
- test_quickstart.py: Walkthrough output and command line
- test_live_quickstart.py: Live service run (needs FACE_SUBSCRIPTION_KEY)

Usage:
    pytest tests -v
"""
