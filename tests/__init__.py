"""Test package for the clock tutor.

The core tests exercise the time model, phrasing, quiz generation, scoring
and persistence without touching pygame. The smoke tests run the pygame shell
headlessly using SDL's dummy video and audio drivers. To run these tests,
execute ``pytest`` from the project root.
"""
