"""
Prompt construction for city weather backgrounds.
"""

from enum import Enum


class WeatherCondition(str, Enum):
    """Weather conditions the generator knows how to depict."""

    CLEAR = "Clear"
    CLOUDY = "Cloudy"
    FOG = "Fog"
    DRIZZLE = "Drizzle"
    RAIN = "Rain"
    SNOW = "Snow"
    THUNDERSTORM = "Thunderstorm"


WEATHER_DETAILS = {
    WeatherCondition.CLEAR: "clear bright sky, optimal visibility",
    WeatherCondition.CLOUDY: "soft cloud cover, diffused lighting",
    WeatherCondition.FOG: "atmospheric fog integrated with buildings, mysterious ambiance",
    WeatherCondition.DRIZZLE: "light rain droplets on miniature buildings, subtle wetness",
    WeatherCondition.RAIN: "dynamic rain elements, wet surfaces with reflections, puddles around buildings",
    WeatherCondition.SNOW: "snow-covered miniature city, falling snowflakes, winter textures on architecture",
    WeatherCondition.THUNDERSTORM: "dramatic storm clouds above, lighting effects, dark atmospheric mood",
}

DAY_LIGHTING = "bright daylight, sun visible"
NIGHT_LIGHTING = "night scene, ambient city lights, subtle moonlight"

SCENE_TEMPLATE = (
    "Present a clear, 45° top-down view of a vertical (9:16) isometric miniature 3D cartoon scene, "
    "highlighting iconic landmarks of {city} centered in the composition to showcase precise and "
    "delicate modeling. The scene features soft, refined textures with realistic PBR materials and "
    "gentle, lifelike lighting and shadow effects. Weather elements are creatively integrated into "
    "the urban architecture: {weather}, establishing a dynamic interaction between the city's "
    "landscape and atmospheric conditions, creating an immersive weather ambiance. Use a clean, "
    "unified composition with minimalistic aesthetics and a soft, solid-colored background that "
    "highlights the main content. The overall visual style is fresh and soothing. Display the city "
    "name (large text) positioned directly above the weather icon. The weather information has no "
    "background and can subtly overlap with the buildings. The text should match the input city's "
    "native language. City name: {city}"
)


def weather_prompt(condition: str, is_day: bool) -> str:
    """Describe the weather and lighting of a scene."""
    lighting = DAY_LIGHTING if is_day else NIGHT_LIGHTING
    try:
        details = WEATHER_DETAILS[WeatherCondition(condition.strip().capitalize())]
    except ValueError:
        # Unknown conditions are passed through as free text
        details = condition.strip().lower()
    return f"{details}, {lighting}"


def build_prompt(city: str, condition: str, is_day: bool) -> str:
    """Full image prompt for a city under a weather condition."""
    return SCENE_TEMPLATE.format(city=city, weather=weather_prompt(condition, is_day))
