from act_prep.models.passage import Passage
from act_prep.models.attempt import Attempt

__all__ = ["Passage", "Attempt"]
