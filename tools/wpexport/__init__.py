"""
WordPress Exporter – archive a WordPress site's posts as Markdown.

Supports:
  • Paginated retrieval from the public REST API (rate-limit aware)
  • Downloading embedded images and rewriting them to local paths
  • HTML → Markdown conversion with YAML-style front matter
  • One file per post, named from the post slug
"""
