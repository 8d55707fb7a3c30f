from django.db import models


class TaxReport(models.Model):
    """Saved VAT / IS declaration for a quarter or a whole year"""
    QUARTER_CHOICES = [
        ('q1', 'Q1'),
        ('q2', 'Q2'),
        ('q3', 'Q3'),
        ('q4', 'Q4'),
        ('annual', 'Annual'),
    ]
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('filed', 'Filed'),
    ]

    year = models.PositiveIntegerField()
    quarter = models.CharField(max_length=10, choices=QUARTER_CHOICES)
    data = models.JSONField(default=dict)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.year} {self.quarter.upper()}"

    class Meta:
        db_table = 'tax_reports'
        unique_together = ['year', 'quarter']
        ordering = ['-year', '-quarter']
