from .rates_api import RatesAPIClient, parse_time

__all__ = ['RatesAPIClient', 'parse_time']
