import pytest

from embedment.loads import DesignFactors, LoadCase
from embedment.pile import PileGeometry
from embedment.soil import SlopeMode, SoilLayer


@pytest.fixture
def sand():
    return SoilLayer(name="S1 sand", thickness=1.8, gamma=18.0, phi=30.0, cohesion=0.0,
                     shaft_friction=5.0)


@pytest.fixture
def clay():
    return SoilLayer(name="S2 clay", thickness=3.4, gamma=19.0, phi=22.5, cohesion=10.0,
                     shaft_friction=20.0, slope_mode=SlopeMode.ABOVE_15, slope_deg=20.0)


@pytest.fixture
def pile():
    return PileGeometry(width=0.2, perimeter=0.5978)


@pytest.fixture
def factors():
    return DesignFactors(gamma_d=1.3, gamma_z=1.3, alpha_c=1.0, eta=1.4)


@pytest.fixture
def loads():
    return [
        LoadCase(position="P1", compression=20.1, tension=5.0, horizontal=5.0, moment=10.0,
                 support="short", zone="green"),
        LoadCase(position="P2", compression=8.0, tension=15.0, horizontal=8.0, moment=20.0,
                 support="long", zone="red"),
    ]
