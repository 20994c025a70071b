"""Unit names: registry, parser, prefixes, lookup, systems and locales."""
