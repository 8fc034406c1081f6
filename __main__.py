"""Pulumi entry point; see shipyard.program."""

from shipyard.program import run

run()
