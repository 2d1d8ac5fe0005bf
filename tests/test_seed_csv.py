import pytest
from sqlalchemy import select

from conftest import make_incubator
from incubridge.models import Admin
from incubridge.security import verify_password
from incubridge.seed_csv import read_incubators, seed

CSV = """email,password,name,specialization,location
Hub@Alpha.io,pw1,Alpha Labs,AI/ML,Pune
beta@hub.io,pw2,Beta Hub,Healthcare,
bad@domain.io,pw3,Nowhere,Space,
,pw4,No Email,Finance,
hub@alpha.io,pw5,Alpha Duplicate,AI/ML,
"""


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "incubators.csv"
    path.write_text(CSV, encoding="utf-8")
    return path


def test_read_incubators_drops_invalid_rows(csv_path):
    rows = read_incubators(str(csv_path))
    assert list(rows["email"]) == ["hub@alpha.io", "beta@hub.io"]
    assert list(rows["incubator_name"]) == ["", ""]


def test_read_incubators_requires_columns(tmp_path):
    path = tmp_path / "broken.csv"
    path.write_text("email,name\na@b.io,A\n", encoding="utf-8")
    with pytest.raises(ValueError):
        read_incubators(str(path))


async def test_seed_skips_existing_accounts(csv_path, session, session_factory):
    await make_incubator(session, "Existing", domain="Healthcare", email="beta@hub.io")

    result = await seed(str(csv_path), session_factory=session_factory)
    assert result == {"created": 1, "skipped": 1}

    async with session_factory() as check:
        alpha = (await check.execute(select(Admin).where(Admin.email == "hub@alpha.io"))).scalar_one()
        assert alpha.user_type == "incubator"
        assert alpha.specialization == "AI/ML"
        assert alpha.incubator_name == "Alpha Labs"
        assert alpha.location == "Pune"
        assert verify_password("pw1", alpha.password_hash)

    result = await seed(str(csv_path), session_factory=session_factory)
    assert result == {"created": 0, "skipped": 2}
