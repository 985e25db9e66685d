"""Main module for the mcapi library.

This library provides typed clients for various Minecraft related distribution
services: Mojang's launcher metadata (piston-meta), Fabric, Quilt, Forge, PaperMC,
PurpurMC, Hangar and mclo.gs. Every client is synchronous and returns plain records
parsed from the JSON responses.

The module `mcapi.rules` contains the rule matcher used to interpret the vanilla
version metadata against a host (libraries, natives and arguments).
"""

LIBRARY_NAME = "mcapi"
LIBRARY_VERSION = "0.3.0"
LIBRARY_AUTHORS = ["Github contributors"]
