"""Core primitives: players, ensembles, and the events that bubble between them.

Building and inspecting a tree needs no running event loop; only playing cues and
ostinatos does.
"""
