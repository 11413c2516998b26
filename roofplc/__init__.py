"""
Roof PLC Driver
================
Driver for a two-leaf roll-off observatory roof (flap + roof)
whose motion is sequenced by a Siemens S7 PLC.

Target Hardware: S7 / small logic module with ISO-on-TCP server
I/O Interface:  One data block, one byte per roof signal
"""

__version__ = "1.0.0"
