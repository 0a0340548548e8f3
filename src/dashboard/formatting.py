"""Temperature display helpers shared by the CLI and the API."""


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def format_temperature(celsius: float, fahrenheit: bool = True) -> str:
    """Format an absolute temperature, e.g. '71.6°F' or '22.0°C'."""
    if fahrenheit:
        return f"{celsius_to_fahrenheit(celsius):.1f}°F"
    return f"{celsius:.1f}°C"


def format_temperature_diff(celsius_diff: float, fahrenheit: bool = True) -> str:
    """Format a signed temperature difference, e.g. '+1.8°F' or '-0.5°C'."""
    # A difference scales by 9/5 without the +32 offset
    value = celsius_diff * 9 / 5 if fahrenheit else celsius_diff
    unit = "°F" if fahrenheit else "°C"
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.1f}{unit}"
