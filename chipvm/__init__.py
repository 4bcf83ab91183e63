"""CHIP-8 virtual machine: instruction decoder and step engine."""
from .decoder import Instruction, decode
from .disassembler import disassemble, format_listing
from .machine import Machine, Snapshot

__version__ = "0.1.0"

__all__ = ["Instruction", "Machine", "Snapshot", "decode", "disassemble", "format_listing"]
