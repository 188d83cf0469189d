"""
HPV Expression Analysis Package

A pipeline for finding genes whose expression differs by HPV infection status
in TCGA cohorts. Queries ISB-CGC BigQuery tables, reshapes the expression data
into a feature matrix, aligns it with clinical HPV calls and runs per-gene
two-sample tests.
"""

__version__ = "0.1.0"
