from .stitch_fsm import StitchFSM

__all__ = ["StitchFSM"]
