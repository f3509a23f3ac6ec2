"""
sdvpack - Pack and deploy Stardew Valley mod projects.

This package scans a mod workspace, filters entries through the patterns of
``IgnoreFiles.sdvextension``, and either zips the result or mirrors it into
the game's mod folder, using the paths resolved from
``ConfigOverride.sdvextension``.
"""

__version__ = "0.1.0"
__author__ = "sdvpack Team"
