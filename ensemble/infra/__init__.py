"""Bridges between players and emitters that live outside the tree."""
