"""
Runtime tunables stored in the database.

Known keys:
- stalled_threshold_days: days a DOING task may sit untouched (default 3)
- overload_threshold: open tasks per person before overload (default 10)
"""

from django.db import models


class Setting(models.Model):
    key = models.CharField(max_length=100, primary_key=True)
    value = models.JSONField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'setting'
        verbose_name_plural = 'settings'
        ordering = ['key']

    def __str__(self):
        return self.key
