"""Data loader package exports."""
from .redshift_loader import ParameterisedRedshifts, RedshiftBatch, read_parameterised_redshifts

__all__ = [
    'ParameterisedRedshifts',
    'RedshiftBatch',
    'read_parameterised_redshifts',
]
