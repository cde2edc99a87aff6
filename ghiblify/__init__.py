"""
Ghiblify
Upload an image and get it back rendered in the Studio Ghibli style.
"""
__version__ = "1.0.0"
