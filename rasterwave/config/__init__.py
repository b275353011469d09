from .schema import ScanConfig, ScanSettings, OutputSettings

__all__ = ["ScanConfig", "ScanSettings", "OutputSettings"]
