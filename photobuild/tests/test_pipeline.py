"""Tests for Pipeline class."""

import json
import re

import pytest
from PIL import Image

from photobuild.errors import DescriptorError
from photobuild.pipeline import Pipeline


HEX = re.compile(r'^[0-9a-f]{6}$')


class TestPipeline:
    """End-to-end tests over a small source tree."""

    def test_single_album_photo(self, build_config, source_tree, logger):
        """Test variant, copy and manifest entry for one album photo."""
        result = Pipeline(build_config, logger).run()

        public = source_tree / 'public'
        variant = public / 'albums' / 'trip' / 'a@thumb.webp'
        assert variant.exists()
        assert (public / 'albums' / 'trip' / 'a.jpg').read_bytes() == \
            (source_tree / 'albums' / 'trip' / 'a.jpg').read_bytes()

        manifest = json.loads((public / 'photos.json').read_text())
        photo = manifest['groups'][0]['photos'][0]
        with Image.open(variant) as img:
            assert photo['res'] == [list(img.size)]
        assert photo['res'] == [[80, 40]]
        assert len(photo['corners']) == 4
        assert all(HEX.match(c) for c in photo['corners'])
        assert result.stats.clean

    def test_manifest_transforms_as_configured(self, build_config, source_tree, logger):
        """Test the manifest lists each transform with its configured rule."""
        Pipeline(build_config, logger).run()

        manifest = json.loads((source_tree / 'public' / 'photos.json').read_text())
        assert manifest['transforms'] == [
            {'key': 'thumb', 'resize': {'width': 80, 'height': 80}, 'formats': ['webp']},
        ]

    def test_removed_photo_not_processed(self, build_config, source_tree, logger):
        """Test removed photos and groups produce no files and no entries."""
        Pipeline(build_config, logger).run()

        public = source_tree / 'public'
        assert not (public / 'albums' / 'trip' / 'b@thumb.webp').exists()
        assert not (public / 'albums' / 'trip' / 'b.jpg').exists()
        assert not (public / 'albums' / 'old').exists()
        manifest = json.loads((public / 'photos.json').read_text())
        files = [p['file'] for g in manifest['groups'] for p in g['photos']]
        assert files == ['albums/trip/a.jpg']

    def test_event_without_image(self, build_config, source_tree, logger):
        """Test events without image keep the field absent."""
        Pipeline(build_config, logger).run()

        manifest = json.loads((source_tree / 'public' / 'events.json').read_text())
        events = manifest['groups']['2024']['events']
        assert 'image' not in events[1]
        assert events[0]['image']['res'] == [[60, 80]]
        assert (source_tree / 'public' / 'events' / 'e1@thumb.webp').exists()

    def test_index(self, build_config, source_tree, logger):
        """Test index.json points at every written artifact."""
        result = Pipeline(build_config, logger).run()

        public = source_tree / 'public'
        index = json.loads(result.index.read_text())
        assert index == {
            'license': 'https://creativecommons.org/licenses/by-nc-sa/4.0/ unless otherwise noted',
            'photos': 'photos.json',
            'events': 'events.json',
            'statistics': {'survey': 'stats/survey.json'},
            'folders': {'logos': 'logos/index.json'},
        }
        assert (public / 'stats' / 'survey.json').read_text() == '{"answers": 12}'
        assert json.loads((public / 'logos' / 'index.json').read_text()) == ['club.png']

    def test_second_run_is_cached(self, build_config, source_tree, logger):
        """Test re-running reuses every file and writes identical manifests."""
        Pipeline(build_config, logger).run()
        public = source_tree / 'public'
        variant_bytes = (public / 'albums' / 'trip' / 'a@thumb.webp').read_bytes()
        photos_json = (public / 'photos.json').read_text()
        events_json = (public / 'events.json').read_text()

        result = Pipeline(build_config, logger).run()

        assert result.stats.files_written == 0
        assert result.stats.files_cached == 2
        assert result.stats.copies_cached == 2
        assert (public / 'albums' / 'trip' / 'a@thumb.webp').read_bytes() == variant_bytes
        assert (public / 'photos.json').read_text() == photos_json
        assert (public / 'events.json').read_text() == events_json

    def test_broken_photo_degrades(self, build_config, source_tree, logger):
        """Test a broken photo is reported while the manifest is still written."""
        (source_tree / 'albums' / 'trip' / 'a.jpg').write_bytes(b'broken')

        result = Pipeline(build_config, logger).run()

        manifest = json.loads((source_tree / 'public' / 'photos.json').read_text())
        photo = manifest['groups'][0]['photos'][0]
        assert photo['res'] == [None]
        assert 'corners' not in photo
        assert result.stats.errors == 1
        assert (source_tree / 'public' / 'events' / 'e1@thumb.webp').exists()

    def test_shared_source_processed_once(self, build_config, source_tree, logger):
        """Test a photo used by an album and an event is generated once."""
        events = json.loads((source_tree / 'events.json').read_text())
        events['groups']['2024']['events'][0]['image']['location'] = 'albums/trip/a.jpg'
        (source_tree / 'events.json').write_text(json.dumps(events))

        result = Pipeline(build_config, logger).run()

        assert result.stats.variant_jobs == 1
        manifest = json.loads((source_tree / 'public' / 'events.json').read_text())
        assert manifest['groups']['2024']['events'][0]['image']['res'] == [[80, 40]]

    def test_missing_descriptor(self, build_config, source_tree, logger):
        """Test a missing descriptor aborts the run."""
        (source_tree / 'events.json').unlink()

        with pytest.raises(DescriptorError):
            Pipeline(build_config, logger).run()
