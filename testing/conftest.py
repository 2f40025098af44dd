import pytest

from configs.robots import box_atlas
from models import build_box_atlas


@pytest.fixture(scope="module")
def robot():
    return build_box_atlas(box_atlas)


@pytest.fixture
def bare_robot():
    return build_box_atlas(box_atlas, add_contacts=False)
