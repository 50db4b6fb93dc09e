"""
Raspberry Pi adapters: I2C character LCD, GPIO buttons and the entry point.
"""
