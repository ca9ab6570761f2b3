"""Shared test fixtures."""

import pytest

from dbc_decode.database import Database


SAMPLE_DBC = '''VERSION ""

NS_ :
    CM_
    BA_

BS_:

BU_: ECU Dashboard Gateway

BO_ 100 Engine: 8 ECU
 SG_ RPM : 0|16@1+ (1,0) [0|8000] "rpm" Dashboard
 SG_ Temperature : 16|8@1+ (0.5,-40) [-40|87.5] "degC" Dashboard,Gateway

BO_ 200 Transmission: 8 Gateway
 SG_ Gear : 0|8@1+ (1,0) [0|8] "" Dashboard
 SG_ Speed : 8|16@1+ (0.1,0) [0|6553.5] "km/h" Dashboard

BO_ 300 Chassis: 8 Gateway
 SG_ SteeringAngle : 7|16@0- (0.1,0) [-3276.8|3276.7] "deg" ECU
 SG_ YawRate : 23|12@0- (0.05,0) [-102.4|102.35] "deg/s" ECU

CM_ SG_ 100 RPM "Engine speed";
BA_ "GenMsgCycleTime" BO_ 100 10;
VAL_ 200 Gear 0 "Neutral" 1 "First" ;
'''


@pytest.fixture
def sample_dbc() -> str:
    """DBC text with three messages in both bit layouts."""
    return SAMPLE_DBC


@pytest.fixture
def database(sample_dbc: str) -> Database:
    """A database loaded with the sample DBC."""
    db = Database()
    db.load(sample_dbc)
    return db
