from rest_framework import serializers

class StrictCharField(serializers.CharField):
    """CharField that refuses numbers instead of coercing them."""

    default_error_messages = {
        "not_a_string": "Not a valid string.",
    }

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("not_a_string")
        return super().to_internal_value(data)

class KanjiEntrySerializer(serializers.Serializer):
    kanji = StrictCharField()
    meanings = serializers.ListField(child=StrictCharField())
    onYomi = serializers.ListField(child=StrictCharField())
    kunYomi = serializers.ListField(child=StrictCharField())
    examples = serializers.ListField(child=StrictCharField())
    jlpt = StrictCharField(required=False, allow_null=True)
