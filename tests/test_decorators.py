import pandas as pd
import pytest

from prognostix.utils.decorators import verify_required_column


@verify_required_column({"home_team", "away_team", "fthg"})
def process_dataframe(df: pd.DataFrame) -> None:
    pass


def test_process_dataframe_success():
    df = pd.DataFrame(
        {
            "home_team": ["Chelsea", "Liverpool", "Saint Etienne"],
            "away_team": ["Man U", "Betis", "PSG"],
            "fthg": [1, 0, 2],
        }
    )
    process_dataframe(df)


def test_process_dataframe_failure():
    df = pd.DataFrame(
        {
            "home_team": ["Chelsea", "Liverpool", "Saint Etienne"],
            "away_team": ["Man U", "Betis", "PSG"],
        }
    )
    with pytest.raises(ValueError):
        process_dataframe(df)


def test_no_df_passed():
    @verify_required_column({"A"})
    def func(x):
        return x

    assert func(5) == 5


def test_method_receives_df_after_self():
    class Model:
        @verify_required_column({"col"})
        def fit(self, df):
            return len(df)

    assert Model().fit(pd.DataFrame({"col": [1, 2]})) == 2
    with pytest.raises(ValueError):
        Model().fit(pd.DataFrame({"other": [1]}))


def test_keyword_df():
    @verify_required_column({"col"})
    def func(a, **kwargs):
        pass

    df = pd.DataFrame({"col": [1]})
    func(1, df=df)


def test_missing_columns_message_lists_every_column():
    df = pd.DataFrame({"A": [1]})
    with pytest.raises(ValueError) as exc:
        process_dataframe(df)
    assert "away_team, fthg, home_team" in str(exc.value)
