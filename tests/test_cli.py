"""Tests for the CLI interface."""

import json

import pytest
from click.testing import CliRunner

import tiffcore
from tiffcore import log
from tiffcore.cli import main
from tests.conftest import build_tiff, build_tiff_multi_ifd, pack_values, rgb_entries


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def _plain_output():
    log.set_color_enabled(False)
    yield


class TestVersion:
    def test_version(self, runner):
        result = runner.invoke(main, ['--version'])
        assert result.exit_code == 0
        assert tiffcore.__version__ in result.output


class TestInfoCommand:
    def test_info(self, runner, tmp_tiff_with_strips):
        result = runner.invoke(main, ['info', str(tmp_tiff_with_strips)])
        assert result.exit_code == 0
        assert 'little-endian' in result.output
        assert 'Directories: 1' in result.output
        assert 'Valid: yes' in result.output
        assert '64x48 RGB 24-bit stripped (NONE)' in result.output

    def test_info_multi_ifd(self, runner, tmp_tiff_multi_ifd):
        result = runner.invoke(main, ['info', str(tmp_tiff_multi_ifd)])
        assert result.exit_code == 0
        assert 'Directories: 2' in result.output
        assert '[1] 512x384' in result.output

    def test_info_json_output(self, runner, tmp_tiff_multi_ifd, tmp_path):
        json_file = tmp_path / 'info.json'
        result = runner.invoke(main, ['info', str(tmp_tiff_multi_ifd),
                                      '--json-out', str(json_file)])
        assert result.exit_code == 0
        data = json.loads(json_file.read_text())
        assert data['directory_count'] == 2
        assert data['byte_order'] == 'little-endian'
        assert data['is_valid'] is False
        assert data['directories'][0]['width'] == 1024

    def test_info_not_tiff(self, runner, tmp_not_tiff):
        result = runner.invoke(main, ['info', str(tmp_not_tiff)])
        assert result.exit_code == 1
        assert 'Invalid byte order' in result.output

    def test_info_with_config(self, runner, tmp_tiff_multi_ifd, tmp_path):
        config = tmp_path / 'config.json'
        config.write_text(json.dumps({'max_directories': 1}))
        result = runner.invoke(main, ['info', str(tmp_tiff_multi_ifd),
                                      '--config', str(config)])
        assert result.exit_code == 1
        assert 'exceeds 1 directories' in result.output

    def test_info_bad_config(self, runner, tmp_tiff_with_strips, tmp_path):
        config = tmp_path / 'config.json'
        config.write_text(json.dumps({'bogus': 1}))
        result = runner.invoke(main, ['info', str(tmp_tiff_with_strips),
                                      '--config', str(config)])
        assert result.exit_code == 1
        assert 'bogus' in result.output

    def test_info_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ['info', str(tmp_path / 'missing.tif')])
        assert result.exit_code != 0


class TestTagsCommand:
    def test_lists_tags(self, runner, tmp_tiff_with_strips):
        result = runner.invoke(main, ['tags', str(tmp_tiff_with_strips)])
        assert result.exit_code == 0
        assert 'ImageWidth' in result.output
        assert 'StripByteCounts' in result.output
        assert '[8, 8, 8]' in result.output

    def test_second_directory(self, runner, tmp_tiff_multi_ifd):
        result = runner.invoke(main, ['tags', str(tmp_tiff_multi_ifd), '--directory', '1'])
        assert result.exit_code == 0
        assert '2024:06:15 10:31:00' in result.output

    def test_missing_directory(self, runner, tmp_tiff_with_strips):
        result = runner.invoke(main, ['tags', str(tmp_tiff_with_strips), '-d', '5'])
        assert result.exit_code == 1
        assert 'does not exist' in result.output

    def test_bad_tag_does_not_stop_listing(self, runner, tmp_path):
        entries = [
            (256, 3, 1, 64),
            (270, 2, 5, b'\xff\xfe\xfd\xfc\x00'),   # not UTF-8
            (271, 99, 1, 0),                        # unknown field type
            (257, 3, 1, 48),
        ]
        path = tmp_path / 'bad_tags.tif'
        path.write_bytes(build_tiff(entries))
        result = runner.invoke(main, ['tags', str(path)])
        assert result.exit_code == 0
        assert 'Invalid string data' in result.output
        assert 'Invalid field type: 99' in result.output
        assert 'ImageLength' in result.output

    def test_tags_json_output(self, runner, tmp_path):
        entries = [
            (256, 3, 1, 64),
            (282, 5, 1, pack_values('I', [300, 1])),
            (271, 99, 1, 0),
        ]
        path = tmp_path / 'tags.tif'
        path.write_bytes(build_tiff(entries))
        json_file = tmp_path / 'tags.json'
        result = runner.invoke(main, ['tags', str(path), '--json-out', str(json_file)])
        assert result.exit_code == 0
        rows = json.loads(json_file.read_text())['tags']
        assert rows[0] == {'tag': 256, 'name': 'ImageWidth', 'type': 'SHORT',
                           'count': 1, 'inline': True, 'value': [64]}
        assert rows[1]['value'] == [[300, 1]]
        assert rows[1]['inline'] is False
        assert 'error' in rows[2]

    def test_tags_with_config(self, runner, tmp_tiff_multi_ifd, tmp_path):
        config = tmp_path / 'config.json'
        config.write_text(json.dumps({'max_directories': 1}))
        result = runner.invoke(main, ['tags', str(tmp_tiff_multi_ifd),
                                      '--config', str(config)])
        assert result.exit_code == 1
        assert 'exceeds 1 directories' in result.output

    def test_tags_bad_config(self, runner, tmp_tiff_with_strips, tmp_path):
        config = tmp_path / 'config.json'
        config.write_text('not json')
        result = runner.invoke(main, ['tags', str(tmp_tiff_with_strips),
                                      '--config', str(config)])
        assert result.exit_code == 1
        assert 'cannot load config' in result.output


class TestValidateCommand:
    def test_valid_file(self, runner, tmp_tiff_with_strips):
        result = runner.invoke(main, ['validate', str(tmp_tiff_with_strips)])
        assert result.exit_code == 0
        assert 'OK' in result.output
        assert '1 valid, 0 invalid' in result.output

    def test_invalid_files(self, runner, tmp_tiff_with_strips, tmp_not_tiff, tmp_tiff_no_layout):
        result = runner.invoke(main, ['validate', str(tmp_tiff_with_strips),
                                      str(tmp_not_tiff), str(tmp_tiff_no_layout)])
        assert result.exit_code == 1
        assert '1 valid, 2 invalid' in result.output
        assert 'missing image size or data layout' in result.output

    def test_log_file(self, runner, tmp_tiff_with_strips, tmp_not_tiff, tmp_path):
        log_path = tmp_path / 'validate.log'
        result = runner.invoke(main, ['validate', str(tmp_tiff_with_strips),
                                      str(tmp_not_tiff), '--log', str(log_path)])
        assert result.exit_code == 1
        lines = log_path.read_text().splitlines()
        assert len(lines) == 2
        assert '[INFO]' in lines[0]
        assert '[ERROR]' in lines[1]

    def test_unreadable_secondary_directory_warns(self, runner, tmp_path):
        main_ifd = rgb_entries() + [(273, 4, 1, 8), (279, 4, 1, 8)]
        broken_ifd = [(256, 13, 1, 64)]                 # unknown field type
        path = tmp_path / 'partly_broken.tif'
        path.write_bytes(build_tiff_multi_ifd([main_ifd, broken_ifd]))
        log_path = tmp_path / 'validate.log'
        result = runner.invoke(main, ['validate', str(path), '--log', str(log_path)])
        assert result.exit_code == 0
        assert 'OK (2 directories, unreadable: 1)' in result.output
        assert '1 valid, 0 invalid' in result.output
        assert '[WARN]' in log_path.read_text()

    def test_requires_path(self, runner):
        result = runner.invoke(main, ['validate'])
        assert result.exit_code != 0


class TestDebugFlag:
    def test_debug_accepted(self, runner, tmp_tiff_with_strips):
        result = runner.invoke(main, ['--debug', 'validate', str(tmp_tiff_with_strips)])
        assert result.exit_code == 0
