# =============================================================================
# tests/test_loaders.py - Controller and Model Discovery Tests
# =============================================================================
# Tests for app/loaders.py against the directories in tests/fixtures/.
#
# Run with: poetry run pytest tests/test_loaders.py -v
# =============================================================================

import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.exceptions import ControllerLoadError
from app.loaders import import_module_from_path, load_controllers, load_models


# =============================================================================
# Controllers
# =============================================================================

class TestLoadControllers:
    """Test load_controllers."""

    def test_loads_packages_in_order(self, fixtures_dir):
        app = FastAPI()

        modules = load_controllers(fixtures_dir / "controllers", app)

        assert [m.__name__ for m in modules] == [
            "controllers.orders",
            "controllers.pages",
            "controllers.users",
        ]

    def test_skips_directories_without_init(self, fixtures_dir):
        modules = load_controllers(fixtures_dir / "controllers", FastAPI())
        assert "controllers.assets" not in {m.__name__ for m in modules}

    def test_register_function_adds_routes(self, fixtures_dir):
        app = FastAPI()
        load_controllers(fixtures_dir / "controllers", app)

        response = TestClient(app).get("/users")

        assert response.json() == {"users": ["ada", "grace"]}

    def test_router_attribute_is_included(self, fixtures_dir):
        app = FastAPI()
        load_controllers(fixtures_dir / "controllers", app)

        response = TestClient(app).get("/orders")

        # Uses a relative import inside the controller package
        assert response.json() == {"orders": [{"id": 1, "total": 9.5}]}

    def test_same_controllers_register_on_several_apps(self, fixtures_dir):
        first, second = FastAPI(), FastAPI()
        load_controllers(fixtures_dir / "controllers", first)
        load_controllers(fixtures_dir / "controllers", second)

        assert TestClient(first).get("/users").status_code == 200
        assert TestClient(second).get("/users").status_code == 200

    def test_controller_without_entry_point(self, fixtures_dir):
        with pytest.raises(ControllerLoadError) as exc_info:
            load_controllers(fixtures_dir / "bad_controllers", FastAPI())

        assert exc_info.value.code == "CONTROLLER_LOAD_ERROR"
        assert exc_info.value.details["path"].endswith("empty")

    def test_missing_directory(self, fixtures_dir):
        with pytest.raises(FileNotFoundError):
            load_controllers(fixtures_dir / "does-not-exist", FastAPI())


# =============================================================================
# Models
# =============================================================================

class TestLoadModels:
    """Test load_models."""

    def test_loads_modules_and_skips_tests(self, fixtures_dir):
        modules = load_models(fixtures_dir / "models")

        assert [m.__name__ for m in modules] == ["models.order", "models.user"]
        assert modules[1].TABLE == "users"

    def test_registers_in_sys_modules(self, fixtures_dir):
        load_models(fixtures_dir / "models")
        assert sys.modules["models.order"].TABLE == "orders"

    def test_second_load_reuses_modules(self, fixtures_dir):
        first = load_models(fixtures_dir / "models")
        second = load_models(fixtures_dir / "models")

        assert [id(m) for m in first] == [id(m) for m in second]


# =============================================================================
# import_module_from_path
# =============================================================================

class TestImportModuleFromPath:
    """Test import_module_from_path."""

    def test_failed_import_is_not_cached(self, fixtures_dir):
        with pytest.raises(RuntimeError, match="must not be loaded"):
            import_module_from_path("models.test_user", fixtures_dir / "models" / "test_user.py")

        assert "models.test_user" not in sys.modules

    def test_same_name_different_file_reloads(self, tmp_path):
        first = tmp_path / "a"
        second = tmp_path / "b"
        first.mkdir()
        second.mkdir()
        (first / "thing.py").write_text("VALUE = 1\n")
        (second / "thing.py").write_text("VALUE = 2\n")

        try:
            assert import_module_from_path("models.thing", first / "thing.py").VALUE == 1
            assert import_module_from_path("models.thing", second / "thing.py").VALUE == 2
        finally:
            sys.modules.pop("models.thing", None)
