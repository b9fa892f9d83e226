from rest_framework import serializers

from .calculations import COMPUTED_FIELDS, INPUT_FIELDS, compute_all_fields, oversized_fields, validate_inputs
from .models import ProjectBudget


class ProjectBudgetSerializer(serializers.ModelSerializer):
    percent_spent = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        model = ProjectBudget
        fields = ('id', 'project', 'as_of_date') + INPUT_FIELDS + COMPUTED_FIELDS + (
            'percent_spent', 'updated_at')

    def validate(self, attrs):
        """
        Refuse inputs that fail the advisory budget rules

        On partial updates, inputs that were not sent keep their stored value.
        """
        inputs = {}
        for field in INPUT_FIELDS:
            if field in attrs:
                inputs[field] = attrs[field]
            elif self.instance is not None:
                inputs[field] = getattr(self.instance, field)
        errors = validate_inputs(inputs)
        oversized = oversized_fields(compute_all_fields(inputs))
        if oversized:
            errors.append('Too large to store: {}'.format(', '.join(oversized)))
        if errors:
            raise serializers.ValidationError(errors)
        return attrs
