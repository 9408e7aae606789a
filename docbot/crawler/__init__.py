"""Crawler package — frontier, batched staging writer and the BFS loop."""

from docbot.crawler.crawler import CrawlStats, crawl_source
from docbot.crawler.frontier import Frontier
from docbot.crawler.writer import BatchedWriter

__all__ = ["crawl_source", "CrawlStats", "Frontier", "BatchedWriter"]
