"""
Preprocessing module for text normalization in information retrieval tasks.
Includes tokenization, lowercase conversion, stop word filtering and stemming.
"""
