"""Test suite for Bandwidth Tracker."""
