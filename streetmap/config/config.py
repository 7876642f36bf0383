from typing import List, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API configuration
    api_version: str = "1.0"
    log_level: str = "INFO"

    # Overpass configuration
    overpass_endpoints: List[str] = [
        "https://overpass-api.de/api/interpreter",
        "https://overpass.kumi.systems/api/interpreter",
    ]
    request_timeout_s: float = 60.0

    # Bounding boxes (south, west, north, east)
    road_bbox: Tuple[float, float, float, float] = (9.50, 43.99, 9.62, 44.13)
    poi_bbox: Tuple[float, float, float, float] = (9.52, 44.02, 9.60, 44.11)

    # Retry policy for the road dataset
    road_fetch_attempts: int = 3
    road_retry_base_delay_s: float = 2.0

    # Map view
    map_center: Tuple[float, float] = (9.56, 44.064)
    map_default_zoom: int = 14
    map_min_zoom: int = 12
    map_max_zoom: int = 19

    # Label tiers: a tier is attached while zoom >= its threshold.
    # The major tier follows map_min_zoom unless set explicitly.
    major_label_min_zoom: int | None = None
    secondary_label_min_zoom: int = 15
    minor_label_min_zoom: int = 16

    # Road styling and focus
    road_opacity: float = 0.7
    highlight_color: str = "#ff0000"
    highlight_weight: int = 6
    highlight_opacity: float = 1.0
    focus_padding: Tuple[int, int] = (50, 50)
    focus_max_zoom: int = 17
    place_focus_zoom: int = 18
    place_fly_duration_s: float = 0.8
    popup_settle_delay_s: float = 0.85

    # Search
    search_debounce_s: float = 0.2
    max_place_results: int = 5
    max_road_results: int = 10
    max_road_results_without_places: int = 15

    # Background category preloading
    preload_stagger_s: float = 1.5

    model_config = SettingsConfigDict(
        env_prefix="STREETMAP_", env_file=".env", extra="ignore"
    )

    @property
    def major_label_zoom(self) -> int:
        if self.major_label_min_zoom is None:
            return self.map_min_zoom
        return self.major_label_min_zoom


settings = Settings()
