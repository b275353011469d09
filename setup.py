from setuptools import setup, find_packages

setup(
    name = "rasterwave",
    description="Chunked raster scan waveform generation for laser scanning instruments",
    version = "0.1",
    packages = find_packages(include=["rasterwave", "rasterwave.*"]),
    python_requires = ">=3.11",
    install_requires = [
        "numpy",
        "numba",
        "pydantic>=2",
        "platformdirs",
    ],
    extras_require = {
        "test": ["pytest"],
        "scripts": ["matplotlib"],
    },
)
