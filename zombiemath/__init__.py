"""Zombie Math: arcade arithmetic trainer game core and HTTP surface."""
