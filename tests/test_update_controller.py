import pytest

from suburbview.catalog.area_catalog import AreaCatalog
from suburbview.controller.update import Phase, UpdateController
from suburbview.core.geo import BoundingBox
from suburbview.domain.errors import CatalogRefreshFailed, SensorPermissionDenied, SensorUnavailable
from suburbview.domain.models import Area, Coordinate


class RecordingPresenter:
    def __init__(self):
        self.views = []
        self.errors = []

    def show_view(self, results, observer=None):
        self.views.append([r.area.name for r in results])

    def show_error(self, message):
        self.errors.append(message)


def _area(name: str, lat: float, lon: float) -> Area:
    return Area(name=name, location=Coordinate(lat=lat, lon=lon))


CATALOG = [_area("East", 0, 0.01), _area("West", 0, -0.01), _area("North", 0.01, 0)]


def test_lifecycle_position_then_heading():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter, catalog=AreaCatalog(CATALOG))
    assert controller.phase is Phase.AWAITING_POSITION

    assert controller.on_position(0, 0) is None
    assert controller.phase is Phase.AWAITING_HEADING
    assert presenter.views == []

    controller.on_heading(90)
    assert controller.phase is Phase.READY
    assert presenter.views == [["East"]]


def test_heading_before_position_is_kept_until_position_arrives():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter, catalog=AreaCatalog(CATALOG))

    controller.on_heading(0)
    assert controller.phase is Phase.AWAITING_POSITION
    assert presenter.views == []

    controller.on_position(0, 0)
    assert controller.phase is Phase.READY
    assert presenter.views == [["North"]]


def test_every_reading_in_ready_emits_a_fresh_view():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter, catalog=AreaCatalog(CATALOG))
    controller.on_position(0, 0)
    controller.on_heading(90)
    controller.on_heading(270)
    controller.on_position(0, 0)
    assert presenter.views == [["East"], ["West"], ["West"]]


def test_position_requests_refresh_around_new_position():
    requests: list[BoundingBox] = []
    controller = UpdateController(RecordingPresenter(), request_refresh=requests.append)

    controller.on_position(-33.9, 151.2)

    assert len(requests) == 1
    box = requests[0]
    assert box.north == pytest.approx(-33.9 + 5000 / 111320)
    assert box.south == pytest.approx(-33.9 - 5000 / 111320)
    assert box.west < 151.2 < box.east


def test_heading_does_not_request_refresh():
    requests = []
    controller = UpdateController(RecordingPresenter(), request_refresh=requests.append)
    controller.on_heading(10)
    assert requests == []


def test_catalog_replacement_while_ready_recomputes():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter)
    controller.on_position(0, 0)
    controller.on_heading(0)
    assert presenter.views == [[]]

    controller.on_catalog(CATALOG)
    assert presenter.views == [[], ["North"]]


def test_catalog_replacement_before_ready_emits_nothing():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter)
    controller.on_catalog(CATALOG)
    assert presenter.views == []
    assert len(controller.catalog) == 3


def test_failed_refresh_keeps_previous_catalog_and_reports():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter, catalog=AreaCatalog(CATALOG))
    controller.on_position(0, 0)
    controller.on_heading(90)

    controller.on_catalog_failed(CatalogRefreshFailed("timed out"))

    assert presenter.errors == ["Failed to fetch suburb data: timed out"]
    assert len(controller.catalog) == 3
    controller.on_heading(90)
    assert presenter.views[-1] == ["East"]


def test_heading_normalized_into_range():
    controller = UpdateController(RecordingPresenter())
    controller.on_heading(360)
    assert controller.state.heading == 0.0
    controller.on_heading(-90)
    assert controller.state.heading == 270.0


def test_invalid_position_leaves_state_untouched():
    controller = UpdateController(RecordingPresenter())
    controller.on_position(10, 20)
    with pytest.raises(ValueError):
        controller.on_position(100, 0)
    assert controller.state.position == Coordinate(lat=10, lon=20)


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_heading_leaves_state_untouched(bad):
    presenter = RecordingPresenter()
    controller = UpdateController(presenter, catalog=AreaCatalog(CATALOG))
    controller.on_position(0, 0)
    controller.on_heading(90)
    with pytest.raises(ValueError, match="finite"):
        controller.on_heading(bad)
    assert controller.state.heading == 90.0
    assert controller.phase is Phase.READY

    controller.on_position(0, 0)
    assert presenter.views[-1] == ["East"]


def test_view_carries_the_observer_it_was_computed_from():
    seen = []

    class ObserverRecorder(RecordingPresenter):
        def show_view(self, results, observer=None):
            seen.append(observer)

    controller = UpdateController(ObserverRecorder(), catalog=AreaCatalog(CATALOG))
    controller.on_position(-33.8688, 151.2093)
    controller.on_heading(450)
    assert seen[-1].position == Coordinate(lat=-33.8688, lon=151.2093)
    assert seen[-1].heading == 90.0


def test_heading_stream_inactive_drops_heading_and_ignores_readings():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter, catalog=AreaCatalog(CATALOG))
    controller.on_position(0, 0)
    controller.on_heading(90)

    controller.on_heading_stream(False)
    assert controller.phase is Phase.AWAITING_HEADING
    assert controller.on_heading(90) is None
    assert presenter.views == [["East"]]

    controller.on_heading_stream(True)
    controller.on_heading(0)
    assert presenter.views == [["East"], ["North"]]


def test_sensor_unavailable_is_reported_once():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter)
    controller.on_sensor_error(SensorUnavailable("heading"))
    controller.on_sensor_error(SensorUnavailable("heading"))
    assert presenter.errors == ["Heading is not supported on this device"]
    assert controller.heading_active is False


def test_permission_denied_is_reported_and_position_keeps_working():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter, catalog=AreaCatalog(CATALOG))
    controller.on_sensor_error(SensorPermissionDenied("heading"))
    controller.on_position(0, 0)

    assert presenter.errors == ["Permission to access heading was denied"]
    assert controller.phase is Phase.AWAITING_HEADING
    assert presenter.views == []


def test_position_sensor_error_does_not_touch_heading_stream():
    presenter = RecordingPresenter()
    controller = UpdateController(presenter)
    controller.on_sensor_error(SensorUnavailable("position", "Geolocation is not supported by your browser"))
    assert controller.heading_active is True
    assert presenter.errors == ["Geolocation is not supported by your browser"]
