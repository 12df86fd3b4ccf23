import pytest
from pydantic import ValidationError

from app.config import TRICK_NAME_COLUMN_LEN, Settings, settings
from app.models.game import Round


def test_trick_name_limit_fits_the_column():
    assert Round.__table__.c.trick_name.type.length == TRICK_NAME_COLUMN_LEN
    assert 1 <= settings.trick_name_max_len <= TRICK_NAME_COLUMN_LEN

    assert Settings(trick_name_max_len=40).trick_name_max_len == 40
    with pytest.raises(ValidationError):
        Settings(trick_name_max_len=TRICK_NAME_COLUMN_LEN + 1)
    with pytest.raises(ValidationError):
        Settings(trick_name_max_len=0)
