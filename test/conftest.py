import pytest

from alsam_xml import (Header, Layer, Path, SegmentStyle, Trajectory, Traveler, VelocityProfile,
                       Wobble)

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<!--Scan file created using OSU CDME's cdme-scangen-ui.-->
<Layer>
  <Header>
    <AmericaMakesSchemaVersion>2020-03-23</AmericaMakesSchemaVersion>
    <LayerNum>7</LayerNum>
    <LayerThickness>0.03</LayerThickness>
    <DosingFactor>1.5</DosingFactor>
    <BuildDescription>nut, island hatching</BuildDescription>
  </Header>
  <SegmentStyleList>
    <SegmentStyle>
      <ID>Contour1</ID>
      <VelocityProfileID>Slow</VelocityProfileID>
      <LaserMode>Independent</LaserMode>
      <Traveler>
        <ID>1</ID>
        <SyncDelay>0</SyncDelay>
        <Power>200</Power>
        <SpotSize>80.5</SpotSize>
        <Wobble>
          <On>1</On>
          <Freq>1000</Freq>
          <Shape>-1</Shape>
          <TransAmp>0.05</TransAmp>
          <LongAmp>0.02</LongAmp>
        </Wobble>
      </Traveler>
    </SegmentStyle>
    <SegmentStyle>
      <ID>Hatch1</ID>
      <VelocityProfileID>Fast</VelocityProfileID>
      <LaserMode>FollowMe</LaserMode>
      <Traveler>
        <ID>1</ID>
        <Power>250.0</Power>
      </Traveler>
      <Traveler>
        <ID>2</ID>
        <SyncDelay>15</SyncDelay>
        <Power>100</Power>
      </Traveler>
    </SegmentStyle>
    <SegmentStyle>
      <ID>Jump</ID>
      <VelocityProfileID>Fast</VelocityProfileID>
    </SegmentStyle>
  </SegmentStyleList>
  <VelocityProfileList>
    <VelocityProfile>
      <ID>Slow</ID>
      <Velocity>200</Velocity>
      <Mode>Delay</Mode>
      <LaserOnDelay>10</LaserOnDelay>
      <LaserOffDelay>-5.5</LaserOffDelay>
      <JumpDelay>100</JumpDelay>
      <MarkDelay>50</MarkDelay>
      <PolygonDelay>20</PolygonDelay>
    </VelocityProfile>
    <VelocityProfile>
      <ID>Fast</ID>
      <Velocity>2000.0</Velocity>
      <Mode>Auto</Mode>
      <LaserOnDelay>0</LaserOnDelay>
      <LaserOffDelay>0</LaserOffDelay>
      <JumpDelay>0</JumpDelay>
      <MarkDelay>0</MarkDelay>
      <PolygonDelay>0</PolygonDelay>
    </VelocityProfile>
  </VelocityProfileList>
  <TrajectoryList>
    <Trajectory>
      <TrajectoryID>0</TrajectoryID>
      <PathProcessingMode>sequential</PathProcessingMode>
      <Path>
        <Type>contour</Type>
        <Tag>part1</Tag>
        <NumSegments>3</NumSegments>
        <SkyWritingMode>0</SkyWritingMode>
        <Start>
          <X>0</X>
          <Y>0</Y>
        </Start>
        <Segment>
          <SegmentID>1</SegmentID>
          <SegStyle>Contour1</SegStyle>
          <End>
            <X>10</X>
            <Y>0</Y>
          </End>
        </Segment>
        <Segment>
          <SegmentID>2</SegmentID>
          <SegStyle>Contour1</SegStyle>
          <End>
            <X>10</X>
            <Y>10</Y>
          </End>
        </Segment>
        <Segment>
          <SegStyle>Contour1</SegStyle>
          <End>
            <X>0</X>
            <Y>0</Y>
          </End>
        </Segment>
      </Path>
    </Trajectory>
    <Trajectory>
      <TrajectoryID>1</TrajectoryID>
      <PathProcessingMode>concurrent</PathProcessingMode>
      <Path>
        <Type>hatch</Type>
        <Tag>part1</Tag>
        <NumSegments>2</NumSegments>
        <SkyWritingMode>2</SkyWritingMode>
        <Start>
          <X>1.5</X>
          <Y>-2.25</Y>
        </Start>
        <Segment>
          <SegStyle>Hatch1</SegStyle>
          <End>
            <X>8.5</X>
            <Y>-2.25</Y>
          </End>
        </Segment>
        <Segment>
          <SegStyle>Jump</SegStyle>
          <End>
            <X>8.5</X>
            <Y>-1.75</Y>
          </End>
        </Segment>
      </Path>
    </Trajectory>
  </TrajectoryList>
</Layer>
"""


@pytest.fixture
def sample_xml():
    return SAMPLE_XML


@pytest.fixture
def make_layer():
    """Factory for a small valid layer; keyword arguments override header fields"""
    def _make(**header_fields):
        header = dict(AmericaMakesSchemaVersion="2020-03-23", LayerThickness=0.03, LayerNum=1)
        header.update(header_fields)
        return Layer(
            Header=Header(**header),
            VelocityProfiles={
                "V1": VelocityProfile("V1", 500.0, "Auto", 1.0, 2.0, 3.0, 4.0, 5.0),
                "VJ": VelocityProfile("VJ", 5000.0, "Delay", 0.0, 0.0, 10.0, 0.0, 0.0),
            },
            SegmentStyles={
                "Hatch1": SegmentStyle("Hatch1", "V1",
                                       [Traveler(1, 150.0, SyncDelay=3, SpotSize=60.0,
                                                 Wobble=Wobble(0, 200, 1, 0.1, 0.2))],
                                       "Independent"),
                "Jump": SegmentStyle("Jump", "VJ"),
            },
            Trajectories=[
                Trajectory("0", "sequential", [
                    Path.from_points([(0, 0), (3, 4), (3, 0)], "Hatch1", "hatch",
                                     segment_ids=["a", "b"]),
                    Path.from_points([(3, 0), (0.0001, 1e-7)], "Jump", "contour", sky_writing_mode=3),
                ]),
            ],
        )
    return _make
