import pandas as pd
from django.db.models import Sum
from django.http import HttpResponse
from rest_framework.response import Response
from rest_framework.views import APIView

from .domain_fees import FeeComponent, FeeLineItem, Payment, PaymentStatus
from .permissions import IsAdmin

UNKNOWN_PROGRAMME = "Unknown Programme"


def _normalize_programme(value):
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or UNKNOWN_PROGRAMME
    return UNKNOWN_PROGRAMME


def fee_collection_frame(academic_year=None, semester=None):
    """One row per programme; billed/paid/outstanding per fee component plus totals."""
    items = FeeLineItem.objects.all()
    if academic_year:
        items = items.filter(academic_year=academic_year)
    if semester:
        items = items.filter(semester=semester)

    rows = list(items.values("id", "component", "amount", "student__student_profile__programme"))
    paid_by_item = dict(
        Payment.objects.filter(fee__in=items, status=PaymentStatus.COMPLETED)
        .values_list("fee_id")
        .annotate(paid=Sum("amount"))
    )

    if not rows:
        return pd.DataFrame(columns=["programme", "billed", "paid", "outstanding"])

    df = pd.DataFrame(rows)
    df.rename(columns={"student__student_profile__programme": "programme"}, inplace=True)
    df["programme"] = df["programme"].apply(_normalize_programme)
    df["billed"] = df["amount"].astype(float)
    df["paid"] = df["id"].map(lambda pk: float(paid_by_item.get(pk) or 0))

    pivot = df.pivot_table(
        index="programme",
        columns="component",
        values=["billed", "paid"],
        aggfunc="sum",
        fill_value=0,
    )
    pivot.columns = [f"{component}_{measure}" for measure, component in pivot.columns]

    ordered = []
    for component in FeeComponent.values:
        for measure in ("billed", "paid"):
            col = f"{component}_{measure}"
            if col in pivot.columns:
                ordered.append(col)
    pivot = pivot[ordered].copy()

    pivot["billed"] = pivot[[c for c in ordered if c.endswith("_billed")]].sum(axis=1)
    pivot["paid"] = pivot[[c for c in ordered if c.endswith("_paid")]].sum(axis=1)
    pivot["outstanding"] = pivot["billed"] - pivot["paid"]
    pivot = pivot.reset_index()

    numeric_cols = [c for c in pivot.columns if c != "programme"]
    total_row = {"programme": "GRAND TOTAL"}
    for col in numeric_cols:
        total_row[col] = round(float(pivot[col].sum()), 2)
    pivot = pd.concat([pivot, pd.DataFrame([total_row])], ignore_index=True)
    pivot[numeric_cols] = pivot[numeric_cols].astype(float).round(2)
    return pivot


class FeeCollectionStatsView(APIView):
    """
    Fee collection by Programme & Fee Component

    Rows  : programme
    Cols  : <component>_billed / <component>_paid, billed, paid, outstanding
    Export: ?export=excel
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        pivot = fee_collection_frame(
            academic_year=request.query_params.get("academic_year"),
            semester=request.query_params.get("semester"),
        )

        if request.query_params.get("export") == "excel":
            response = HttpResponse(
                content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
            )
            response["Content-Disposition"] = 'attachment; filename="Fee_Collection_By_Programme.xlsx"'

            with pd.ExcelWriter(response, engine="openpyxl") as writer:
                pivot.to_excel(writer, index=False, sheet_name="Fee Collection")

            return response

        return Response({
            "columns": list(pivot.columns),
            "data": pivot.to_dict(orient="records"),
        })
