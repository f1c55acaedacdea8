"""Shared utilities for the ng-dev commands."""
