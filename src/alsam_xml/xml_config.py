"""
Layer data model

Attribute names are the ALSAM XML tag names, so a field's rule, its model
attribute and its wire tag are the same string. Optional fields are ``None``
when absent.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class Header():
    AmericaMakesSchemaVersion : str # YYYY-MM-DD
    LayerThickness : float # > 0
    LayerNum : Optional[int] = None # >= 0
    AbsoluteHeight : Optional[float] = None # > 0
    DosingFactor : Optional[float] = None # > 0
    BuildDescription : Optional[str] = None

@dataclass
class VelocityProfile():
    ID : str
    Velocity : float # > 0
    Mode : str # Delay or Auto
    LaserOnDelay : float # microsecond
    LaserOffDelay : float # microsecond
    JumpDelay : float # microsecond
    MarkDelay : float # microsecond
    PolygonDelay : float # microsecond

@dataclass
class Wobble():
    On : int # 0 or 1
    Freq : int # Hz
    Shape : int # [-1, 0, 1]
    TransAmp : float # mm
    LongAmp : float # mm

@dataclass
class Traveler():
    ID : int
    Power : float # >= 0, Watts
    SyncDelay : Optional[int] = None # microsecond, only if multi laser
    SpotSize : Optional[float] = None # microns
    Wobble : Optional[Wobble] = None

@dataclass
class SegmentStyle():
    ID : str
    VelocityProfileID : str
    Travelers : List[Traveler] = field(default_factory=list)
    LaserMode : Optional[str] = None # Independent or FollowMe; only set when there are travelers

    @property
    def is_jump(self) -> bool:
        """A style without travelers marks nothing"""
        return not self.Travelers

@dataclass
class Segment():
    X1 : float
    Y1 : float
    X2 : float
    Y2 : float
    SegStyle : str
    SegmentID : Optional[str] = None

    @property
    def start(self) -> Tuple[float, float]:
        return (self.X1, self.Y1)

    @property
    def end(self) -> Tuple[float, float]:
        return (self.X2, self.Y2)

@dataclass
class Path():
    Type : str # hatch or contour
    Tag : str
    NumSegments : int # == len(Segments)
    SkyWritingMode : int # 0, 1, 2, 3
    Segments : List[Segment] = field(default_factory=list)

    @property
    def start(self) -> Optional[Tuple[float, float]]:
        return self.Segments[0].start if self.Segments else None

    @classmethod
    def from_points(cls, points, seg_style: str, path_type: str = "hatch", tag: str = "part1",
                    sky_writing_mode: int = 0, segment_ids: Optional[List[str]] = None) -> "Path":
        """Builds a path whose segments chain through `points`.

        :param points: sequence of (x, y) pairs; n points make n-1 segments
        :param seg_style: SegmentStyle ID used for every segment
        :param segment_ids: optional SegmentID per segment
        """
        points = [(float(x), float(y)) for x, y in points]
        segments = []
        for i in range(1, len(points)):
            segments.append(Segment(points[i-1][0], points[i-1][1], points[i][0], points[i][1],
                                    seg_style, segment_ids[i-1] if segment_ids else None))
        return cls(path_type, tag, len(segments), sky_writing_mode, segments)

@dataclass
class Trajectory():
    TrajectoryID : str
    PathProcessingMode : str # sequential or concurrent
    Paths : List[Path] = field(default_factory=list)

@dataclass
class Layer():
    Header : Header
    VelocityProfiles : Dict[str, VelocityProfile] = field(default_factory=dict)
    SegmentStyles : Dict[str, SegmentStyle] = field(default_factory=dict)
    Trajectories : List[Trajectory] = field(default_factory=list) # firing order

    def segments(self):
        """Yields (trajectory, path, segment) in firing order"""
        for trajectory in self.Trajectories:
            for path in trajectory.Paths:
                for segment in path.Segments:
                    yield trajectory, path, segment
