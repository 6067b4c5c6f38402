"""
Core domain models, money primitives, errors and persisted-document contracts.

This module contains the building blocks that are independent of the price
source, the executor and any I/O.
"""
