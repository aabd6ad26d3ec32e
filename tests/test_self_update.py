"""
Tests for self-update.
"""

from docker_tools.core.models.settings import SelfUpdateSettings
from docker_tools.core.services.self_update import self_update, update_destination

SOURCE_A = "https://a.example/docker-tools.pyz"
SOURCE_B = "https://b.example/docker-tools.pyz"


class TestDestination:
    def test_running_zipapp_is_replaced(self, settings, tmp_path):
        app = tmp_path / "bin" / "docker-tools.pyz"
        app.parent.mkdir()
        assert update_destination(settings, str(app)) == app

    def test_otherwise_download_dir(self, settings):
        dest = update_destination(settings, "/usr/local/bin/docker-tools")
        assert dest == settings.download_path / "docker-tools.pyz"


class TestSelfUpdate:
    def test_first_source(self, settings, http, reporter, tmp_path):
        http.add_file(SOURCE_A, b"PK new build")
        http.add_file(SOURCE_B, b"PK other build")
        dest = tmp_path / "docker-tools.pyz"

        receipt = self_update(settings, http, reporter, dest=dest)

        assert receipt.ok
        assert receipt.metadata == {"source": SOURCE_A}
        assert dest.read_bytes() == b"PK new build"
        assert dest.stat().st_mode & 0o111
        assert http.requested("DOWNLOAD") == [SOURCE_A]

    def test_falls_through_failed_and_empty_sources(self, settings, http, reporter, tmp_path):
        settings = settings.model_copy(
            update={
                "self_update": SelfUpdateSettings(
                    sources=["https://gone.example/x.pyz", SOURCE_A, SOURCE_B],
                )
            }
        )
        http.add_file(SOURCE_A, b"")
        http.add_file(SOURCE_B, b"PK build")

        receipt = self_update(settings, http, reporter, dest=tmp_path / "docker-tools.pyz")

        assert receipt.ok
        assert receipt.metadata["source"] == SOURCE_B

    def test_all_sources_fail(self, settings, http, reporter, tmp_path):
        receipt = self_update(settings, http, reporter, dest=tmp_path / "docker-tools.pyz")
        assert receipt.failed
        assert SOURCE_A in receipt.error and SOURCE_B in receipt.error

    def test_no_sources(self, settings, http, reporter):
        settings = settings.model_copy(update={"self_update": SelfUpdateSettings()})
        receipt = self_update(settings, http, reporter)
        assert receipt.failed
        assert http.call_log == []
