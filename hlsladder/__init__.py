"""
hlsladder - adaptive bitrate HLS packaging for VOD sources
"""

__version__ = "1.0.0"
