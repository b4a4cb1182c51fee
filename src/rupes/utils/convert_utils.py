"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Size parsing and formatting for CLI input and report output.
"""

import math


class ConvertUtils:
    @staticmethod
    def bytes_to_decimal(size_bytes: int) -> str:
        """
        Convert bytes to decimal-unit string used in reports.
        Whole bytes print without decimals ("18 B"), larger values with two ("1.50 MB").
        """
        if size_bytes < 0:
            size_bytes = 0
        if size_bytes < 1000:
            return f"{int(size_bytes)} B"

        value = float(size_bytes)
        for unit in ["kB", "MB", "GB", "TB", "PB"]:
            value /= 1000
            if value < 1000:
                return f"{value:.2f} {unit}"
        return f"{value / 1000:.2f} EB"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Convert human-readable size string to bytes.
        Supports formats: '1.5GB', '2048KB', '1000', '1K', '1M', '1G', etc.
        Raises ValueError for negative sizes or invalid formats.
        """
        size_str = size_str.strip().upper()

        units = {
            'PB': 1024 ** 5, 'P': 1024 ** 5,
            'TB': 1024 ** 4, 'T': 1024 ** 4,
            'GB': 1024 ** 3, 'G': 1024 ** 3,
            'MB': 1024 ** 2, 'M': 1024 ** 2,
            'KB': 1024, 'K': 1024,
            'B': 1,
        }

        # Longest suffix first so 'KB' is not read as 'K' + 'B'
        for unit in sorted(units.keys(), key=len, reverse=True):
            if size_str.endswith(unit):
                value_str = size_str[:-len(unit)].strip()
                try:
                    value = float(value_str)
                except ValueError:
                    raise ValueError(f"Invalid numeric value in size: '{value_str}'")

                if not math.isfinite(value * units[unit]):
                    raise ValueError(f"Invalid numeric value in size: '{value_str}'")
                if value < 0:
                    raise ValueError(f"Negative size not allowed: '{size_str}'")
                return int(value * units[unit])

        # No unit specified, treat as bytes
        try:
            value = int(size_str)
        except ValueError:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1.5GB, 2048KB, 1000, 1K, 1M, etc."
            )

        if value < 0:
            raise ValueError(f"Negative size not allowed: '{size_str}'")
        return value

    @staticmethod
    def is_valid_size_format(size_str: str) -> bool:
        """
        Check if the input string has a valid size format.
        """
        try:
            ConvertUtils.human_to_bytes(size_str)
            return True
        except ValueError:
            return False

    @staticmethod
    def seconds_to_human(seconds: float) -> str:
        """Format an elapsed duration: '850.12ms', '3.40s', '2m 05.31s'."""
        if seconds < 0:
            seconds = 0.0
        if seconds < 1:
            return f"{seconds * 1000:.2f}ms"
        if seconds < 60:
            return f"{seconds:.2f}s"
        minutes, rest = divmod(seconds, 60)
        return f"{int(minutes)}m {rest:05.2f}s"
