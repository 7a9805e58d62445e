"""
Pytest fixtures for photobuild tests.
"""

import json
import logging

import pytest
from PIL import Image


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')


@pytest.fixture
def make_image():
    """Fixture providing a factory that writes a test image to disk."""
    def _make(path, size=(200, 100), color='red', mode='RGB', fmt=None):
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new(mode, size, color=color)
        img.save(path, format=fmt)
        return path
    return _make


@pytest.fixture
def thumb_transform():
    """Fixture providing an 80x80 webp transform."""
    from photobuild.transform_spec import ResizePolicy, TransformSpec

    return TransformSpec(key='thumb', formats=['webp'], resize=ResizePolicy(width=80, height=80))


@pytest.fixture
def transforms(thumb_transform):
    """Fixture providing two transforms in key order."""
    from photobuild.transform_spec import ResizePolicy, TransformSpec

    return [
        TransformSpec(key='large', formats=['webp', 'jpg'], resize=ResizePolicy(width=160)),
        thumb_transform,
    ]


@pytest.fixture
def source_tree(tmp_path, make_image):
    """
    Fixture providing a source folder with albums, events, stats and logos.

    Albums: group 'Trip' with a.jpg (200x100) and removed b.jpg;
    removed group 'Old'. Events: e1 with image (120x160), e2 without.
    """
    src = tmp_path / 'src'
    make_image(src / 'albums' / 'trip' / 'a.jpg', size=(200, 100), color='red')
    make_image(src / 'albums' / 'trip' / 'b.jpg', size=(50, 50), color='blue')
    make_image(src / 'albums' / 'old' / 'c.jpg', size=(50, 50), color='green')
    make_image(src / 'events' / 'e1.jpg', size=(120, 160), color='yellow')
    make_image(src / 'logos' / 'club.png', size=(16, 16), color='black')

    (src / 'photos.json').write_text(json.dumps({
        'title': 'Albums',
        'groups': [
            {
                'title': 'Trip',
                'photos': [
                    {'location': 'albums/trip/a.jpg', 'caption': 'Arrival', 'instructional': False},
                    {'location': 'albums/trip/b.jpg', 'removed': True},
                ],
            },
            {
                'title': 'Old',
                'removed': True,
                'photos': [{'location': 'albums/old/c.jpg'}],
            },
        ],
    }))
    (src / 'events.json').write_text(json.dumps({
        'groups': {
            '2024': {
                'events': [
                    {'id': 'e1', 'title': 'Meetup',
                     'image': {'location': 'events/e1.jpg', 'caption': 'Crowd'}},
                    {'id': 'e2', 'title': 'Talk'},
                ],
            },
        },
    }))
    (src / 'stats').mkdir()
    (src / 'stats' / 'survey-2024.json').write_text('{"answers": 12}')
    return src


@pytest.fixture
def build_config(source_tree):
    """Fixture providing a config for the source tree with one transform."""
    from photobuild.build_config import BuildConfig

    return BuildConfig(
        source=str(source_tree),
        target='public',
        transforms={'thumb': {'resize': {'width': 80, 'height': 80}, 'formats': ['webp']}},
        stats={'survey': 'stats/survey-2024.json'},
        folders=['logos'],
        settle_delay=0,
    )
